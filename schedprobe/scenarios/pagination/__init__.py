"""Pagination scenario — limit/offset echo and orderBy on credential lists."""

NAME = "pagination"
DESCRIPTION = "Credential list pagination and ordering"
ORDER = 50
