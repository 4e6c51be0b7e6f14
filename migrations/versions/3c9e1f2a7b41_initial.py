"""initial schema and seed data

Revision ID: 3c9e1f2a7b41
Revises:
Create Date: 2025-08-14 14:11:28.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3c9e1f2a7b41'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


# bcrypt hash of "password"; change it after the first login
ADMIN_PASSWORD_HASH = '$2a$10$92IXUNpkjO0rOQ5byMi.Ye4oKoEa3Ro9llC/.og/at2.uheWG/igi'

# (id, name, code, type, parent_id, path, method)
SEED_PERMISSIONS = [
    (1, 'User management', 'user:manage', 'menu', 0, '/user', None),
    (2, 'List users', 'user:list', 'api', 1, '/api/users', 'GET'),
    (3, 'Create user', 'user:create', 'api', 1, '/api/users', 'POST'),
    (4, 'Update user', 'user:update', 'api', 1, '/api/users/:id', 'PUT'),
    (5, 'Delete user', 'user:delete', 'api', 1, '/api/users/:id', 'DELETE'),
    (6, 'Role management', 'role:manage', 'menu', 0, '/role', None),
    (7, 'List roles', 'role:list', 'api', 6, '/api/roles', 'GET'),
    (8, 'Create role', 'role:create', 'api', 6, '/api/roles', 'POST'),
    (9, 'Update role', 'role:update', 'api', 6, '/api/roles/:id', 'PUT'),
    (10, 'Delete role', 'role:delete', 'api', 6, '/api/roles/:id', 'DELETE'),
    (11, 'Permission management', 'permission:manage', 'menu', 0, '/permission', None),
    (12, 'List permissions', 'permission:list', 'api', 11, '/api/permissions', 'GET'),
    (13, 'Create permission', 'permission:create', 'api', 11, '/api/permissions', 'POST'),
    (14, 'Update permission', 'permission:update', 'api', 11, '/api/permissions/:id', 'PUT'),
    (15, 'Delete permission', 'permission:delete', 'api', 11, '/api/permissions/:id', 'DELETE'),
]

SEED_ROLES = [
    (1, 'Super administrator', 'super_admin', 'Holds every permission'),
    (2, 'Administrator', 'admin', 'Holds most management permissions'),
    (3, 'Operator', 'operator', 'Holds basic operating permissions'),
]


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
    ]


def upgrade() -> None:
    # Users table
    users = op.create_table('users',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('username', sa.String(length=50), nullable=False),
    sa.Column('email', sa.String(length=100), nullable=False),
    sa.Column('password_hash', sa.String(length=255), nullable=False),
    sa.Column('real_name', sa.String(length=50), nullable=True),
    sa.Column('phone', sa.String(length=20), nullable=True),
    sa.Column('avatar', sa.String(length=255), nullable=True),
    sa.Column('status', sa.SmallInteger(), server_default='1', nullable=False),
    sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
    sa.Column('last_login_ip', sa.String(length=45), nullable=True),
    *_timestamps(),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_username'), 'users', ['username'], unique=True)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    # Roles table
    roles = op.create_table('roles',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('name', sa.String(length=50), nullable=False),
    sa.Column('code', sa.String(length=50), nullable=False),
    sa.Column('description', sa.String(length=255), nullable=True),
    sa.Column('status', sa.SmallInteger(), server_default='1', nullable=False),
    *_timestamps(),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_roles_code'), 'roles', ['code'], unique=True)

    # Permissions table (parent_id 0 = root)
    permissions = op.create_table('permissions',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('name', sa.String(length=50), nullable=False),
    sa.Column('code', sa.String(length=100), nullable=False),
    sa.Column('type', sa.Enum('menu', 'button', 'api', name='permission_type', native_enum=False, length=10), nullable=False),
    sa.Column('parent_id', sa.Integer(), server_default='0', nullable=False),
    sa.Column('path', sa.String(length=255), nullable=True),
    sa.Column('method', sa.String(length=10), nullable=True),
    sa.Column('icon', sa.String(length=50), nullable=True),
    sa.Column('sort_order', sa.Integer(), server_default='0', nullable=False),
    sa.Column('status', sa.SmallInteger(), server_default='1', nullable=False),
    *_timestamps(),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_permissions_code'), 'permissions', ['code'], unique=True)
    op.create_index(op.f('ix_permissions_parent_id'), 'permissions', ['parent_id'], unique=False)

    # Association tables
    user_roles = op.create_table('user_roles',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('user_id', sa.Integer(), nullable=False),
    sa.Column('role_id', sa.Integer(), nullable=False),
    sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['role_id'], ['roles.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('user_id', 'role_id', name='uq_user_roles_user_role')
    )
    op.create_index(op.f('ix_user_roles_user_id'), 'user_roles', ['user_id'], unique=False)
    op.create_index(op.f('ix_user_roles_role_id'), 'user_roles', ['role_id'], unique=False)

    role_permissions = op.create_table('role_permissions',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('role_id', sa.Integer(), nullable=False),
    sa.Column('permission_id', sa.Integer(), nullable=False),
    sa.ForeignKeyConstraint(['role_id'], ['roles.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['permission_id'], ['permissions.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('role_id', 'permission_id', name='uq_role_permissions_role_permission')
    )
    op.create_index(op.f('ix_role_permissions_role_id'), 'role_permissions', ['role_id'], unique=False)
    op.create_index(op.f('ix_role_permissions_permission_id'), 'role_permissions', ['permission_id'], unique=False)

    # Seed data
    op.bulk_insert(permissions, [
        {'id': id_, 'name': name, 'code': code, 'type': type_, 'parent_id': parent_id, 'path': path, 'method': method}
        for id_, name, code, type_, parent_id, path, method in SEED_PERMISSIONS
    ])
    op.bulk_insert(roles, [
        {'id': id_, 'name': name, 'code': code, 'description': description}
        for id_, name, code, description in SEED_ROLES
    ])
    # super_admin holds every permission
    op.bulk_insert(role_permissions, [
        {'role_id': 1, 'permission_id': permission[0]} for permission in SEED_PERMISSIONS
    ])
    op.bulk_insert(users, [
        {'id': 1, 'username': 'admin', 'email': 'admin@example.com', 'password_hash': ADMIN_PASSWORD_HASH, 'real_name': 'Super administrator'},
    ])
    op.bulk_insert(user_roles, [{'user_id': 1, 'role_id': 1}])

    # Explicit ids bypass PostgreSQL sequences; move them past the seed rows
    if op.get_bind().dialect.name == 'postgresql':
        for table in ('users', 'roles', 'permissions'):
            op.execute(
                f"SELECT setval(pg_get_serial_sequence('{table}', 'id'), (SELECT MAX(id) FROM {table}))"
            )


def downgrade() -> None:
    op.drop_index(op.f('ix_role_permissions_permission_id'), table_name='role_permissions')
    op.drop_index(op.f('ix_role_permissions_role_id'), table_name='role_permissions')
    op.drop_table('role_permissions')
    op.drop_index(op.f('ix_user_roles_role_id'), table_name='user_roles')
    op.drop_index(op.f('ix_user_roles_user_id'), table_name='user_roles')
    op.drop_table('user_roles')
    op.drop_index(op.f('ix_permissions_parent_id'), table_name='permissions')
    op.drop_index(op.f('ix_permissions_code'), table_name='permissions')
    op.drop_table('permissions')
    op.drop_index(op.f('ix_roles_code'), table_name='roles')
    op.drop_table('roles')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_index(op.f('ix_users_username'), table_name='users')
    op.drop_table('users')
