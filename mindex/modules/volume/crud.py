"""CRUD operations for volume entities using FastCRUD."""

from fastcrud import FastCRUD

from .models import Volume

volume_crud: FastCRUD = FastCRUD(Volume)
