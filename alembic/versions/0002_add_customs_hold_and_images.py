from alembic import op
import sqlalchemy as sa

revision = '0002_add_customs_hold_and_images'
down_revision = '0001_init'
branch_labels = None
depends_on = None

def upgrade():
    op.add_column('shipments', sa.Column('customs_hold', sa.Boolean, nullable=False, server_default=sa.false()))
    op.add_column('shipments', sa.Column('package_images', sa.JSON, nullable=True))

def downgrade():
    op.drop_column('shipments', 'package_images')
    op.drop_column('shipments', 'customs_hold')
