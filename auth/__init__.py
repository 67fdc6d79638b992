"""auth/ -- Authentication package for TaskTrack.

Password hashing, session tokens, transport cookies, CSRF protection, the
signup/login/logout gateway and the per-request identity guard.

Layer rule: auth/ imports only stdlib, third-party libraries and core/.
It does NOT import from api/ or tasks/.
api/ imports from auth/, not the other way around.
"""
