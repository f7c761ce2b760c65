# "expand 32-byte k" as four little-endian words
CHACHA_CONST = (
    0x61707865,
    0x3320646E,
    0x79622D32,
    0x6B206574,
)

KEY_SIZE = 32
NONCE_SIZE = 12
BLOCK_SIZE = 64
STATE_WORDS = 16

DEFAULT_ROUNDS = 20
INITIAL_COUNTER = 1

WORD_MASK = 0xFFFFFFFF
COUNTER_MAX = WORD_MASK  # last usable block counter; the stream ends after it

DEFAULT_ENTROPY_DEVICE = "/dev/random"
