import functools

import config


class GroupSyncError(Exception):
    ...


class ConfigurationError(GroupSyncError):
    ...


class MembershipUpdateError(GroupSyncError):
    ...


logger = config.get_logger(service="errors")


def handle_errors(fn):  # noqa: ANN001, ANN201
    # Hooks run inside the host's login and signup flows: log and return None
    @functools.wraps(fn)
    def wrapper(*args, **kwargs):  # noqa: ANN002, ANN003, ANN202
        try:
            return fn(*args, **kwargs)
        except Exception as e:
            logger.exception(f"Group sync hook {fn.__name__} failed:", exc_info=e)
            return None

    return wrapper
