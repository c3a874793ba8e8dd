from vital_registry.api.endpoints.registrations import create_registration_router
from vital_registry.models.registration import RegistrationKind
from vital_registry.schemas.registration import BirthRegistrationResponse

router = create_registration_router(RegistrationKind.BIRTH, BirthRegistrationResponse)
