"""Credentials scenario — create, list, archive and delete an API credential.

The server generates the key pair; the scenario only checks it came back.
"""

NAME = "credentials"
DESCRIPTION = "Credentials CRUD: create, list, archive, delete"
ORDER = 10
