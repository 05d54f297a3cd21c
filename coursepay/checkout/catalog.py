"""Read-only course catalog the checkout flow selects from."""

from pydantic import BaseModel, ConfigDict, Field


class Course(BaseModel):
    """One purchasable course. Prices are stored in minor units (paise)."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    price_minor_units: int = Field(gt=0)
    duration_label: str
    highlights: tuple[str, ...] = ()
    unlock_asset: str = Field(min_length=1, description="Content revealed once payment is verified")

    @property
    def price_major_units(self) -> int | float:
        """Price as sent to `/create-order`; whole rupees stay integers."""

        whole, paise = divmod(self.price_minor_units, 100)
        return whole if paise == 0 else self.price_minor_units / 100


COURSE_CATALOG: tuple[Course, ...] = (
    Course(
        id=1,
        name="Investing & Finance",
        price_minor_units=176900,
        duration_label="4 Months • 16 Classes",
        unlock_asset="assets/FinanceQR.png",
        highlights=(
            "Stock Market From Scratch",
            "Mutual Funds",
            "Gold Investments",
            "Lending Systems",
            "Smart Fixed Deposits",
            "Portfolio Building",
            "AI Systems in Finance",
        ),
    ),
    Course(
        id=2,
        name="Prompt Engineering",
        price_minor_units=124900,
        duration_label="2 Months • 8 Classes",
        unlock_asset="assets/PromptQR.png",
        highlights=(
            "AI Image Generation",
            "Text to Video",
            "Logo Design",
            "Branding",
            "Blog Creation",
            "AI Website Builder",
            "Resume Builder",
        ),
    ),
)

_BY_ID = {course.id: course for course in COURSE_CATALOG}


def get_course(course_id: int) -> Course | None:
    return _BY_ID.get(course_id)
