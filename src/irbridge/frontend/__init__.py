from irbridge.frontend.library import ReferenceFrontend

__all__ = ["ReferenceFrontend"]
