from fleet_board.server.api.router import router

__all__ = ["router"]
