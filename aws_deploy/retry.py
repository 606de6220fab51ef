import functools
import logging
import tenacity
from aws_deploy import errors

logger = logging.getLogger(__name__)

class RetryPolicy:
    """
    bounded retry for calls that aws may rate limit.

    attempts is the total number of calls made. the wait before retry n is
    delay + backoff * (n - 1), or delay * 2 ** (n - 1) when exponential,
    capped at max_delay when set.
    errors that fail the retryable predicate are raised at once, and after
    the last attempt the original error is raised, not a tenacity.RetryError.
    """

    def __init__(self, attempts=3, delay=1.0, backoff=0.5, exponential=False, max_delay=None, retryable=errors.is_rate_limited, sleep=None):
        assert attempts >= 1, f'attempts must be at least 1, got: {attempts}'
        self.attempts = attempts
        self.delay = delay
        self.backoff = backoff
        self.exponential = exponential
        self.max_delay = max_delay
        self.retryable = retryable
        self.sleep = sleep

    def including(self, predicate):
        """a copy of this policy that also retries errors matching predicate"""
        retryable = self.retryable
        return RetryPolicy(attempts=self.attempts,
                           delay=self.delay,
                           backoff=self.backoff,
                           exponential=self.exponential,
                           max_delay=self.max_delay,
                           retryable=lambda e: retryable(e) or predicate(e),
                           sleep=self.sleep)

    def wait(self):
        if self.exponential:
            if self.max_delay is not None:
                return tenacity.wait_exponential(multiplier=self.delay, min=self.delay, max=self.max_delay)
            return tenacity.wait_exponential(multiplier=self.delay, min=self.delay)
        return tenacity.wait_incrementing(start=self.delay, increment=self.backoff)

    def retrying(self):
        kw = {}
        if self.sleep:
            kw['sleep'] = self.sleep
        return tenacity.Retrying(stop=tenacity.stop_after_attempt(self.attempts),
                                 wait=self.wait(),
                                 retry=tenacity.retry_if_exception(self.retryable),
                                 before_sleep=tenacity.before_sleep_log(logger, logging.WARNING),
                                 reraise=True,
                                 **kw)

    def __call__(self, fn):
        @functools.wraps(fn)
        def wrapped(*a, **kw):
            return self.retrying()(fn, *a, **kw)
        return wrapped

    def call(self, fn, *a, **kw):
        return self(fn)(*a, **kw)

def role_ready(sleep=None):
    """
    retries create_function while a newly created role propagates through
    iam. waits 1, 2, 4, 8 then 10 seconds, about 45 seconds over 8 attempts.
    """
    return RetryPolicy(attempts=8, delay=1.0, exponential=True, max_delay=10.0, retryable=errors.is_role_not_ready, sleep=sleep)
