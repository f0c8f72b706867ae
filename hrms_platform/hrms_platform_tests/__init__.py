"""
hrms_platform tests

Covers the authentication core of the HRMS platform:

- Credential store and password hashing (`store.py`, `auth.py`)
- Token issuance and validation (`auth.py`)
- The access gate in front of protected routes (`gate.py`)
- HTTP endpoints (`main.py`)
- The client-side session coordinator (`session_client/`)
"""
