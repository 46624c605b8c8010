"""create comparisons, ui_elements and differences tables

Revision ID: 001_initial
Revises:
Create Date: 2026-10-17 10:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('comparisons',
    sa.Column('uid', sa.String(), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
    sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    sa.Column('name', sa.String(length=255), nullable=True),
    sa.Column('baseline_image_path', sa.Text(), nullable=True),
    sa.Column('comparison_image_path', sa.Text(), nullable=True),
    sa.Column('diff_image_path', sa.Text(), nullable=True),
    sa.Column('report_data', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
    sa.PrimaryKeyConstraint('uid')
    )
    op.create_index('idx_comparisons_created_at', 'comparisons', ['created_at'], unique=False)

    op.create_table('ui_elements',
    sa.Column('uid', sa.String(), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
    sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    sa.Column('comparison_id', sa.String(), nullable=False),
    sa.Column('screenshot_type', sa.String(length=50), nullable=False),
    sa.Column('element_type', sa.String(length=100), nullable=True),
    sa.Column('position', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
    sa.Column('attributes', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
    sa.Column('changed', sa.Boolean(), nullable=True),
    sa.ForeignKeyConstraint(['comparison_id'], ['comparisons.uid'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('uid')
    )
    op.create_index(op.f('ix_ui_elements_comparison_id'), 'ui_elements', ['comparison_id'], unique=False)

    op.create_table('differences',
    sa.Column('uid', sa.String(), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
    sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    sa.Column('comparison_id', sa.String(), nullable=False),
    sa.Column('element_id', sa.String(), nullable=True),
    sa.Column('change_type', sa.String(length=50), nullable=True),
    sa.Column('details', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
    sa.ForeignKeyConstraint(['comparison_id'], ['comparisons.uid'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['element_id'], ['ui_elements.uid'], ondelete='SET NULL'),
    sa.PrimaryKeyConstraint('uid')
    )
    op.create_index(op.f('ix_differences_comparison_id'), 'differences', ['comparison_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_differences_comparison_id'), table_name='differences')
    op.drop_table('differences')
    op.drop_index(op.f('ix_ui_elements_comparison_id'), table_name='ui_elements')
    op.drop_table('ui_elements')
    op.drop_index('idx_comparisons_created_at', table_name='comparisons')
    op.drop_table('comparisons')
