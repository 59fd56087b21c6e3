"""Staff ratio settings model.

One record per account. When no record exists yet the defaults below
apply, see ``caterstaff.services.ratio_settings``.
"""

from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


class StaffRatioSettings(SQLModel, table=True):
    """Ratios used to derive headcount from guest count.

    Attributes:
        id: Unique identifier (UUID).
        account_id: Owning account, unique.
        guests_per_server: Guests one server can look after.
        guests_per_chef: Guests one chef can cook for.
        guests_per_bartender: Guests one bartender can serve.
        head_waiter_enabled: If True, every event gets one head waiter.
        coeff_wedding: Server multiplier for weddings.
        coeff_corporate: Server multiplier for corporate events.
        coeff_birthday: Server multiplier for birthdays and anniversaries.
        auto_replace_after_hours: Hours without an answer after which a
            replacement should be looked for.
    """
    __tablename__ = "staff_ratio_settings"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    account_id: int = Field(default=1, index=True, unique=True)
    guests_per_server: int = Field(default=25, gt=0)
    guests_per_chef: int = Field(default=60, gt=0)
    guests_per_bartender: int = Field(default=80, gt=0)
    head_waiter_enabled: bool = Field(default=True)
    coeff_wedding: float = Field(default=1.2, gt=0)
    coeff_corporate: float = Field(default=1.0, gt=0)
    coeff_birthday: float = Field(default=1.1, gt=0)
    auto_replace_after_hours: int = Field(default=12, ge=0)
