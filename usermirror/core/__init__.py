"""Core state-synchronization logic, independent of Flask.

Module Structure:
    - gorest/         : Remote users API client and gateway
    - models.py       : UserRecord, UserDraft, FilterCriteria, OperationResult
    - filtering.py    : Pure filter over the mirror
    - edit_session.py : Idle / Editing / Creating state machine
    - user_store.py   : UserCollectionStore, the mirror owner
    - validators.py   : Local draft validation

Import explicitly when needed:
    from usermirror.core.user_store import UserCollectionStore
    from usermirror.core.models import FilterCriteria
"""
