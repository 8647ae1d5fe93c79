"""
Common CLI utilities and decorators for consistent command behavior.
"""

import logging
import sys
from functools import wraps

import click

from .errors import TaggrError, NetworkError, ApiError
from .exit_codes import (
    SUCCESS, GENERAL_ERROR, INTERRUPTED,
    get_exit_code_for_exception, CommandError
)
from .context import TaggrContext
from .render import render_error

logger = logging.getLogger(__name__)


def handle_errors(func):
    """
    Decorator that provides standard command error handling:
    - CommandError: message plus remediation hint, its own exit code
    - taggr errors (network, API, validation): message, exit code 1
    - Ctrl+C: exit code 130
    - anything else: message, logged traceback at debug level

    A command may return an int to choose its exit code.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            result = func(*args, **kwargs)
            sys.exit(result if isinstance(result, int) else SUCCESS)

        except KeyboardInterrupt:
            render_error("Interrupted by user")
            sys.exit(INTERRUPTED)
        except click.ClickException:
            # Click exceptions already have their exit code
            raise
        except CommandError as e:
            render_error(str(e), e.hint)
            sys.exit(e.exit_code)
        except NetworkError as e:
            render_error(str(e))
            sys.exit(GENERAL_ERROR)
        except ApiError as e:
            hint = 'Your API key may be invalid. Run "taggr login <API_KEY>" again.' if e.status_code == 401 else None
            render_error(str(e), hint)
            sys.exit(GENERAL_ERROR)
        except TaggrError as e:
            render_error(str(e))
            sys.exit(GENERAL_ERROR)
        except Exception as e:
            logger.debug("Command failed", exc_info=True)
            render_error(f"Command failed: {e}")
            sys.exit(get_exit_code_for_exception(e))

    return wrapper


# Commands receive the TaggrContext built by the cli group
pass_taggr = click.make_pass_decorator(TaggrContext, ensure=True)
