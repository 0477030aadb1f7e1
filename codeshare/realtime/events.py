# Real-time event names

# Client -> system
JOIN = "join"
EDIT_CONTENT = "editContent"
CURSOR_MOVE = "cursorMove"
CREATE_ENTRY = "createEntry"
DELETE_ENTRY = "deleteEntry"
RENAME_ENTRY = "renameEntry"

# System -> client(s)
FILES_SNAPSHOT = "filesSnapshot"
CONTENT_UPDATED = "contentUpdated"
CURSOR_MOVED = "cursorMoved"
ENTRY_CREATED = "entryCreated"
ENTRY_DELETED = "entryDeleted"
ENTRY_RENAMED = "entryRenamed"
ROSTER_CHANGED = "rosterChanged"
MEMBER_JOINED = "memberJoined"
MEMBER_LEFT = "memberLeft"
EXECUTION_COMPLETED = "executionCompleted"
ERROR_NOTICE = "errorNotice"
