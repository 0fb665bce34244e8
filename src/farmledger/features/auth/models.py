from tortoise import fields
from ...common.models import TimestampMixin, generate_ksuid

ROLES = ("admin", "manager", "worker", "viewer")
EDITOR_ROLES = ("admin", "manager", "worker")
MANAGER_ROLES = ("admin", "manager")


class User(TimestampMixin):
    id = fields.IntField(primary_key=True)
    public_id = fields.CharField(max_length=27, unique=True, default=generate_ksuid, db_index=True)
    username = fields.CharField(max_length=100, unique=True, db_index=True)
    email = fields.CharField(max_length=255, unique=True, db_index=True)
    hashed_password = fields.CharField(max_length=255)
    role = fields.CharField(max_length=20, default="worker")  # one of ROLES
    is_active = fields.BooleanField(default=True)

    def __str__(self):
        return f"{self.username} ({self.role})"

    @property
    def can_edit(self) -> bool:
        return self.role in EDITOR_ROLES

    @property
    def can_manage(self) -> bool:
        return self.role in MANAGER_ROLES

    class Meta:
        table = "users"
