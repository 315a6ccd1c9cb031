"""Projects scenario — plain synchronous CRUD on a project."""

NAME = "projects"
DESCRIPTION = "Projects CRUD: create, list, update description, delete"
ORDER = 20
