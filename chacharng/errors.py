class ChaChaRngError(Exception):
    """Base class for chacharng errors."""


# Construction
class ConfigurationError(ChaChaRngError, ValueError):
    pass


class KeyMaterialError(ChaChaRngError, ValueError):
    pass


# Entropy collaborators
class EntropySourceError(ChaChaRngError, OSError):
    pass


# Stream lifecycle
class CounterExhaustedError(ChaChaRngError):
    """The 32-bit block counter has no blocks left for this key and nonce."""


class GeneratorClosedError(ChaChaRngError):
    pass
