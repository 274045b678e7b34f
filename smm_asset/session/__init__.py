from smm_asset.session.smmsession import SMMSession
from smm_asset.session.api import connect, fetch, get_state, close

__all__ = ["SMMSession", "connect", "fetch", "get_state", "close"]
