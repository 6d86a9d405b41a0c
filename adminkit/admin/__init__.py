"""
Metadados e registry dos resources.

Uso:
    from adminkit.admin import Resource, ResourceManager, TextField, IDField

    class TagResource(Resource):
        title = "Tags"
        slug = "tags"

        def get_fields(self):
            return [IDField(), TextField("name", required=True)]

    manager = ResourceManager()
    manager.register(TagResource())

API pública:
    - Resource / RequestContext / FrontendCapabilities
    - ResourceManager: registry de resources e páginas
    - Fields, validators, Action, Column, Filter, Page
    - Capabilities (Protocols) e PermissionAuthorizable
"""

from adminkit.admin.actions import (
    Action,
    BUILTIN_ACTIONS,
    create_action,
    default_actions,
    delete_action,
    edit_action,
    force_delete_action,
    restore_action,
    view_action,
)
from adminkit.admin.capabilities import (
    ActionExecutor,
    Authorizable,
    Capability,
    CapabilityProvider,
    CreateHook,
    DefaultOrder,
    DeleteHook,
    Exportable,
    FieldPermissionProvider,
    Filterable,
    HiddenInNavigation,
    NavigationBadge,
    NavigationGroup,
    NavigationIcon,
    NavigationSort,
    Searchable,
    Sortable,
    UpdateHook,
    detect_capabilities,
)
from adminkit.admin.fields import (
    BooleanField,
    DateField,
    DateTimeField,
    EmailField,
    Field,
    FileField,
    IDField,
    NumberField,
    RelationshipField,
    SelectField,
    TextareaField,
    TextField,
)
from adminkit.admin.manager import ResourceManager
from adminkit.admin.pages import Page
from adminkit.admin.permissions import PermissionAuthorizable, check_resource_permission
from adminkit.admin.resource import FrontendCapabilities, RequestContext, Resource
from adminkit.admin.table import Column, Filter
from adminkit.admin.validators import (
    ChoiceValidator,
    EmailValidator,
    MaxLengthValidator,
    MaxValueValidator,
    MinLengthValidator,
    MinValueValidator,
    RegexValidator,
    RequiredValidator,
    Validator,
    validate_resource_data,
)

__all__ = [
    # Resource
    "Resource",
    "RequestContext",
    "FrontendCapabilities",
    "ResourceManager",
    "Page",
    # Fields
    "Field",
    "IDField",
    "TextField",
    "EmailField",
    "NumberField",
    "SelectField",
    "TextareaField",
    "BooleanField",
    "DateTimeField",
    "DateField",
    "RelationshipField",
    "FileField",
    # Validators
    "Validator",
    "RequiredValidator",
    "EmailValidator",
    "RegexValidator",
    "MinLengthValidator",
    "MaxLengthValidator",
    "MinValueValidator",
    "MaxValueValidator",
    "ChoiceValidator",
    "validate_resource_data",
    # Actions / table
    "Action",
    "BUILTIN_ACTIONS",
    "create_action",
    "edit_action",
    "delete_action",
    "view_action",
    "restore_action",
    "force_delete_action",
    "default_actions",
    "Column",
    "Filter",
    # Capabilities
    "Capability",
    "detect_capabilities",
    "Sortable",
    "Filterable",
    "Searchable",
    "DefaultOrder",
    "Exportable",
    "Authorizable",
    "CreateHook",
    "UpdateHook",
    "DeleteHook",
    "ActionExecutor",
    "FieldPermissionProvider",
    "NavigationIcon",
    "NavigationGroup",
    "NavigationSort",
    "NavigationBadge",
    "HiddenInNavigation",
    "CapabilityProvider",
    # Permissions
    "PermissionAuthorizable",
    "check_resource_permission",
]
