"""CRUD operations for tracked import roots using FastCRUD."""

from fastcrud import FastCRUD

from .models import ImportDirectory

import_directory_crud: FastCRUD = FastCRUD(ImportDirectory)
