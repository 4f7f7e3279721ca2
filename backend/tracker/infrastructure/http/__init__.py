from .tracker_api_client import TrackerApiClient

__all__ = ["TrackerApiClient"]
