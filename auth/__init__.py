"""auth/ -- Authentication subsystem: users, guard, accounts and auth events.

Every lifecycle step (attempt, login, failure, lockout, logout, registration,
password reset, email verification) is announced through an EventDispatcher.
Consumers such as authlog/ subscribe to those events; auth/ never calls them
directly.

Layer rule: auth/ imports only stdlib + third-party libraries and core/.
It does NOT import from authlog/. authlog/ imports from auth/, not the other
way around.
"""
