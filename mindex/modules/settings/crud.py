"""CRUD operations for settings using FastCRUD."""

from fastcrud import FastCRUD

from .models import Setting

setting_crud: FastCRUD = FastCRUD(Setting)
