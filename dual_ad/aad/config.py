"""
AD Configuration

Shared tolerances and switches for the forward/reverse engines and the
finite-difference checks.
"""

from dataclasses import dataclass


@dataclass
class ADConfig:
    """Configuration for derivative evaluation and cross-checking."""
    # Agreement
    agreement_tol: float = 1e-9  # forward-mode vs reverse-mode
    fd_eps: float = 1e-5         # central difference step
    fd_tol: float = 1e-6         # AD vs finite difference

    # Reverse pass
    seed: float = 1.0
    reset_grads: bool = True     # zero every grad before each backward cycle

    # Logging
    verbose: bool = False


DEFAULT_CONFIG = ADConfig()
