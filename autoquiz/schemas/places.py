"""
Address lookup schemas - suggestions from the autocomplete proxy and the
structured address a selected place resolves to.
"""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class AddressSuggestion(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    place_id: str
    description: str
    main_text: str = ""
    secondary_text: str = ""


class AddressFields(BaseModel):
    """The four address fields the survey's address step collects."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    street_address: str = ""
    city: str = ""
    province: str = ""
    postal_code: str = ""
