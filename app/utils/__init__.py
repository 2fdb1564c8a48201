"""
Common utilities package for the Taskboard API.

Credential helpers (bearer tokens, password hashing) live in
`app.utils.auth`; logging setup lives in `app.utils.logger`.
"""
