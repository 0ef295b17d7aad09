"""crear tablas pedidos/productos_pedido

Revision ID: 3f9c1a7b2d40
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9c1a7b2d40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'pedidos',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('pedido_id', sa.String(), nullable=False),
        sa.Column('cliente_id', sa.String(), nullable=False),
        sa.Column('cliente', sa.String(), nullable=True),
        sa.Column('fecha', sa.Date(), nullable=False),
        sa.Column('items', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_productos', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('vendedor', sa.String(), nullable=True),
        sa.Column('estado', sa.String(), nullable=False, server_default='pendiente'),
        sa.Column('puntaje', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('inicio', sa.DateTime(), nullable=True),
        sa.Column('finalizado', sa.DateTime(), nullable=True),
        sa.Column('creado_en', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('actualizado_en', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_pedidos_pedido_id', 'pedidos', ['pedido_id'], unique=True)
    op.create_index('ix_pedidos_estado', 'pedidos', ['estado'])

    op.create_table(
        'productos_pedido',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('id_pedido', sa.Integer(), sa.ForeignKey('pedidos.id', ondelete='CASCADE'), nullable=False),
        sa.Column('codigo', sa.String(), nullable=False),
        sa.Column('cantidad', sa.Integer(), nullable=False),
        sa.Column('descripcion', sa.Text(), nullable=False, server_default=''),
        sa.Column('ubicacion', sa.String(), nullable=True),
        sa.Column('recolectado', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('motivo', sa.Text(), nullable=True),
    )
    op.create_index('ix_productos_pedido_id_pedido', 'productos_pedido', ['id_pedido'])
    op.create_index('ix_productos_pedido_codigo', 'productos_pedido', ['codigo'])


def downgrade() -> None:
    op.drop_index('ix_productos_pedido_codigo', table_name='productos_pedido')
    op.drop_index('ix_productos_pedido_id_pedido', table_name='productos_pedido')
    op.drop_table('productos_pedido')
    op.drop_index('ix_pedidos_estado', table_name='pedidos')
    op.drop_index('ix_pedidos_pedido_id', table_name='pedidos')
    op.drop_table('pedidos')
