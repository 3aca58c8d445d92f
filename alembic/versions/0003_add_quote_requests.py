from alembic import op
import sqlalchemy as sa

revision = '0003_add_quote_requests'
down_revision = '0002_add_customs_hold_and_images'
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        'quote_requests',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('company', sa.String(200), nullable=True),
        sa.Column('service_type', sa.String(30), nullable=False),
        sa.Column('origin', sa.String(255), nullable=True),
        sa.Column('destination', sa.String(255), nullable=True),
        sa.Column('weight_kg', sa.Numeric(10, 2), nullable=True),
        sa.Column('details', sa.Text, nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
    )

def downgrade():
    op.drop_table('quote_requests')
