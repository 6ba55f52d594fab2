import contextlib
import os

from excavator.settings.config import ExcavatorConfig


class ListLogger(object):
    """Call-logging sink keeping every ``(message, scope)`` pair it receives."""

    def __init__(self):
        self.records = []

    def log(self, message, scope):
        self.records.append((message, dict(scope)))

    @property
    def messages(self):
        return [message for message, _ in self.records]

    @property
    def sources(self):
        return [scope["SOURCE"] for _, scope in self.records]

    def clear(self):
        del self.records[:]


@contextlib.contextmanager
def override_env(env, replace_os_env=False):
    """
    Temporarily override ``os.environ`` with provided values::

        >>> with override_env(dict(EXCAVATOR_ENABLED="false")):
            # Your test
    """
    # Copy the full original environment
    original = dict(os.environ)

    # We allow callers to clear out the environment to prevent leaking variables into the test
    if replace_os_env:
        os.environ.clear()

    for k in list(os.environ.keys()):
        if k.startswith("EXCAVATOR_"):
            del os.environ[k]

    # Update based on the passed in arguments
    os.environ.update(env)
    try:
        yield
    finally:
        # Full clear the environment out and reset back to the original
        os.environ.clear()
        os.environ.update(original)


def config_from_env(env):
    """Build a fresh :class:`ExcavatorConfig` as it would be read with ``env`` set."""
    with override_env(env):
        return ExcavatorConfig()
