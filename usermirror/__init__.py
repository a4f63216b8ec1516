"""usermirror: client-side manager for a remote users collection.

To use the Flask JSON API:
    from usermirror.flask_app import create_app

To use the core without HTTP surfaces:
    from usermirror.core.gorest import build_gateway
    from usermirror.core.user_store import UserCollectionStore
"""
# Note: flask_app is not imported here so the CLI can run without Flask
