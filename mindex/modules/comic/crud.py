"""CRUD operations for comic entities using FastCRUD."""

from fastcrud import FastCRUD

from .models import Comic

comic_crud: FastCRUD = FastCRUD(Comic)
