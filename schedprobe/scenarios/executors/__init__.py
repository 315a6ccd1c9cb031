"""Executors scenario — CRUD on the executors jobs run on."""

NAME = "executors"
DESCRIPTION = "Executors CRUD: create, get, list, update, delete"
ORDER = 40
