"""
Aplicação de exemplo.

Registra os resources de exemplo e monta a app admin.
"""

from __future__ import annotations

from adminkit import AdminApp, Page, ResourceManager
from adminkit.config import Settings

from example.resources import CategoryResource, CrudItemResource


def create_example_app(settings: Settings | None = None) -> AdminApp:
    manager = ResourceManager()
    manager.register(CategoryResource())
    items = manager.register(CrudItemResource())
    manager.register_page(Page("Dashboard", "dashboard", icon="home"))

    admin = AdminApp(manager, settings, title="AdminKit Example")
    items.bind(admin.repository)
    return admin
