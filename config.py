import os

# === Telegram token ===
TOKEN = os.getenv("TELEGRAM_BOT_TOKEN", "").strip()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip() or "INFO"

# === Commands ===
# ".top", ".price", ".cal", ".global"; coin info uses "!SYM" without prefix
COMMAND_PREFIX = os.getenv("COMMAND_PREFIX", ".").strip() or "."

# Token that moves the answer into a private chat with the sender
PRIVATE_FLAG = os.getenv("PRIVATE_FLAG", "-p").strip() or "-p"

# === HTTP ===
HTTP_TIMEOUT_SEC = float(os.getenv("HTTP_TIMEOUT_SEC", "10").strip() or "10")

CRYPTOCOMPARE_BASE = os.getenv("CRYPTOCOMPARE_BASE", "https://min-api.cryptocompare.com/data").rstrip("/")
COINMARKETCAP_BASE = os.getenv("COINMARKETCAP_BASE", "https://api.coinmarketcap.com/v1").rstrip("/")
COINMARKETCAL_BASE = os.getenv("COINMARKETCAL_BASE", "https://api.coinmarketcal.com/v1").rstrip("/")
COINMARKETCAL_TOKEN = os.getenv("COINMARKETCAL_TOKEN", "").strip()

# === Price ===
DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "USD").strip().upper() or "USD"
DEFAULT_EXCHANGE = os.getenv("DEFAULT_EXCHANGE", "CCCAGG").strip().upper() or "CCCAGG"

# Secondary quotes shown by "!SYM" (in this order, after USD)
REFERENCE_COINS = ["ETH", "BTC"]

# === Top ===
TOP_DEFAULT_LIMIT = int(os.getenv("TOP_DEFAULT_LIMIT", "5").strip() or "5")
TOP_MAX_LIMIT = int(os.getenv("TOP_MAX_LIMIT", "25").strip() or "25")  # telegram message size

# === Calendar ===
CALENDAR_MIN_CONFIDENCE = int(os.getenv("CALENDAR_MIN_CONFIDENCE", "60").strip() or "60")
