# sql_gateway/generators/security.py

from ..models import SqlStatement, ValidatedArguments

LIST_USERS = """SELECT
  name AS UserName,
  type_desc AS UserType,
  authentication_type_desc AS AuthenticationType,
  default_schema_name AS DefaultSchema,
  create_date,
  modify_date,
  is_fixed_role
FROM sys.database_principals
WHERE type IN ('S', 'U', 'G')
ORDER BY name"""

LIST_ROLES = """SELECT
  name AS RoleName,
  type_desc AS RoleType,
  is_fixed_role AS IsFixedRole
FROM sys.database_principals
WHERE type = 'R'
ORDER BY name"""

USER_PERMISSIONS = """SELECT
  p.permission_name,
  p.permission_state_desc AS PermissionState,
  p.class_desc AS ObjectClass,
  OBJECT_SCHEMA_NAME(p.major_id) AS SchemaName,
  OBJECT_NAME(p.major_id) AS ObjectName
FROM sys.database_permissions p
LEFT JOIN sys.database_principals pr ON p.grantee_principal_id = pr.principal_id
WHERE pr.name = :user_name
ORDER BY p.permission_name, p.class_desc"""


def list_users(args: ValidatedArguments) -> SqlStatement:
    return SqlStatement(LIST_USERS)


def list_roles(args: ValidatedArguments) -> SqlStatement:
    return SqlStatement(LIST_ROLES)


def get_user_permissions(args: ValidatedArguments) -> SqlStatement:
    return SqlStatement(USER_PERMISSIONS, {"user_name": args["userName"]})
