from .app import ScrumBoardApp, run_board

__all__ = ["ScrumBoardApp", "run_board"]
