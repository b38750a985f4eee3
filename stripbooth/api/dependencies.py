from stripbooth.services.booth import booth
from stripbooth.services.storage import storage
from stripbooth.services.websocket import websocket_manager

def get_booth():
    return booth

def get_storage():
    return storage

def get_websocket_manager():
    return websocket_manager
