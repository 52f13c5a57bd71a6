"""Environment variable loading for saccadic.

Load order (first wins):
  1. Existing OS environment variables — never overwrite.
  2. .env file at --env-file path (if explicitly provided).
  3. .env file walking up from cwd, stopping at .git (file or dir).

Walking stops at .git so we never load a .env from outside the repo.
Only sets variables that are NOT already in os.environ.

Recognised variables (CLI defaults, flags override):
  SACCADIC_THEME             theme mode used when resolving themed design variables
  SACCADIC_PIXEL_THRESHOLD   per-channel pixel tolerance as a 0..1 fraction
"""

import logging
import os
from pathlib import Path

from saccadic.core.errors import SaccadicError

logger = logging.getLogger(__name__)

THEME_VAR = 'SACCADIC_THEME'
PIXEL_THRESHOLD_VAR = 'SACCADIC_PIXEL_THRESHOLD'


def _find_dotenv(start: Path) -> Path | None:
    """Walk up from start, return first .env found, stop at .git boundary."""
    current = start.resolve()
    while True:
        candidate = current / '.env'
        if candidate.is_file():
            return candidate
        # .git can be a dir (normal clone) or a file (worktree)
        if (current / '.git').exists():
            return None
        parent = current.parent
        if parent == current:
            return None
        current = parent


def _parse_dotenv(path: Path) -> dict[str, str]:
    """Parse a .env file into a dict. Handles KEY=value and KEY="value"."""
    result: dict[str, str] = {}
    for line in path.read_text(encoding='utf-8').splitlines():
        line = line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        key, _, raw_value = line.partition('=')
        key = key.strip()
        if key.startswith('export '):
            key = key[len('export ') :].strip()
        if key:
            result[key] = raw_value.strip().strip('"').strip("'")
    return result


def load_env(env_file: str | None = None) -> Path | None:
    """Load .env into os.environ for keys not already set.

    Returns the path that was loaded, or None if no .env was found/used.
    """
    if env_file:
        path = Path(env_file)
        if not path.is_file():
            logger.debug('env file %s not found, skipping', env_file)
            return None
    else:
        path = _find_dotenv(Path.cwd())
        if path is None:
            return None

    for key, value in _parse_dotenv(path).items():
        if key not in os.environ:
            os.environ[key] = value
    return path


def default_theme() -> str | None:
    """SACCADIC_THEME, or None when unset or blank."""
    value = os.environ.get(THEME_VAR, '').strip()
    return value or None


def default_pixel_threshold() -> float | None:
    """SACCADIC_PIXEL_THRESHOLD as a 0..1 fraction, or None when unset."""
    raw = os.environ.get(PIXEL_THRESHOLD_VAR, '').strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError as exc:
        raise SaccadicError(f'{PIXEL_THRESHOLD_VAR} must be a number, got {raw!r}') from exc
    if not 0.0 <= value <= 1.0:
        raise SaccadicError(f'{PIXEL_THRESHOLD_VAR} must be between 0 and 1, got {value}')
    return value
