"""TrainFit account client: sign-in, sign-up, profile updates and history."""

__version__ = "0.3.0"
