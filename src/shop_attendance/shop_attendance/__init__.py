"""Shop attendance package.

Keeps a signed-in user's attendance and login-session records in step with the
authentication state, and exposes the live session timer. Organized by feature
modules (users, attendance, login_sessions, sessions) with repository and
service layers over MySQL.
"""
