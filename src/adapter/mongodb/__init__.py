USERS_COLLECTION_NAME = 'users'
SESSIONS_COLLECTION_NAME = 'sessions'
