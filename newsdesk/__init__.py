"""
Newsdesk.

Content-management backend for an articles/comments platform.

- backend/: API, services, repositories, models, remote service clients
"""
