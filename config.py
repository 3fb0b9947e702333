import os
from dotenv import load_dotenv

load_dotenv()

# Storage
_XDG_CONFIG_HOME = os.getenv('XDG_CONFIG_HOME') or os.path.expanduser('~/.config')
CONFIG_DIR = os.getenv('SWIGGY_CONFIG_DIR') or os.path.join(_XDG_CONFIG_HOME, 'swiggy-cli')
COOKIE_FILE = os.path.join(CONFIG_DIR, 'cookie')

# Upstream API
BASE_URL = os.getenv('SWIGGY_BASE_URL', 'https://www.swiggy.com')
USER_AGENT = os.getenv(
    'SWIGGY_USER_AGENT',
    'Mozilla/5.0 (X11; Linux x86_64; rv:139.0) Gecko/20100101 Firefox/139.0'
)
REQUEST_TIMEOUT = float(os.getenv('REQUEST_TIMEOUT', 10))

# A valid session turnaround sets exactly this many Set-Cookie headers.
# Leave SESSION_HEADER_COUNT blank to skip the check.
SESSION_HEADER_NAME = os.getenv('SESSION_HEADER_NAME', 'Set-Cookie')
_session_header_count = os.getenv('SESSION_HEADER_COUNT', '3').strip()
SESSION_HEADER_COUNT = int(_session_header_count) if _session_header_count else None

# Ask for a new cookie and retry once when a session is rejected
SESSION_REFRESH = os.getenv('SESSION_REFRESH', 'true').strip().lower() not in ('0', 'false', 'no', 'off')

DELIVERED_TITLE = os.getenv('DELIVERED_TITLE', 'Order Delivered')

# Polling
POLL_INTERVAL = float(os.getenv('POLL_INTERVAL', 2))
RENDER_INTERVAL = float(os.getenv('RENDER_INTERVAL', 0.3))

# Logging (stdout carries the progress line, so logs go to a file)
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
LOG_FILE = os.getenv('LOG_FILE') or os.path.join(CONFIG_DIR, 'swiggy-cli.log')
