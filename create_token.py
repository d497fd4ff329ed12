import sys

from roadmap_api.app.core.security import create_access_token

# user id of the caller; lifetime 365 days (seconds)
user_id = int(sys.argv[1]) if len(sys.argv) > 1 else 1
token = create_access_token({"user_id": user_id}, expires_delta=365*24*60*60)
print(token)
