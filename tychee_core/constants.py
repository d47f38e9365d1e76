# tychee_core/constants.py

# Default contract ids. Storage is namespaced by contract id, so the
# policy engine and the vault keep independent Owner slots.
AA_CONTRACT_ID = "account_abstraction"
VAULT_CONTRACT_ID = "token_vault"

DEFAULT_METATX_GAS_COST = 1000

SESSION_KEY_LEN = 32
INTEGRITY_HASH_LEN = 32

# Ledger integers are signed 128-bit
I128_MIN = -(2 ** 127)
I128_MAX = 2 ** 127 - 1

# Event topics
TOPIC_AA_MODE = "aa_mode"
TOPIC_SPONSOR = "sponsor"
TOPIC_SESSION = "session"
TOPIC_MULTISIG = "multisig"
TOPIC_METATX = "metatx"
TOPIC_FUND = "fund"
TOPIC_STORE = "store"
TOPIC_ACCESS = "access"
TOPIC_REVOKE = "revoke"
TOPIC_PERM = "perm"
TOPIC_PAUSE = "pause"
TOPIC_UNPAUSE = "unpause"

EVENT_TOPIC_PREFIX = "tychee"
