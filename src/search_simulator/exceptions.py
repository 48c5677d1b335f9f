"""
Custom exceptions for the search simulator.
"""

class SimulatorException(Exception):
    """Base exception for the simulator."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class NetworkGenerationException(SimulatorException):
    """Raised when a network generator is given parameters it cannot build from."""
    pass

class RestoreFailedException(SimulatorException):
    """Raised when a saved network or query snapshot cannot be read back."""
    pass
