# citaplanner/schemas/__init__.py
from .schedule import (
    ExceptionType,
    TimeRange,
    DaySchedule,
    WeeklySchedule,
    ScheduleException
)

from .auth import (
    LoginRequest,
    UserProfile,
    TokenResponse
)

from .professional import (
    ProfessionalCreate,
    ProfessionalUpdate,
    ProfessionalResponse,
    PublicProfessional,
    AvailabilityResponse
)

from .catalog import (
    ServiceCreate,
    ServiceUpdate,
    ServiceResponse,
    ServiceListResponse,
    ClientCreate,
    ClientResponse
)

from .appointment import (
    AppointmentCreate,
    AppointmentStatusUpdate,
    AppointmentResponse,
    AppointmentListResponse,
    IntegrationLogResponse
)

from .tenant import (
    TenantCreate,
    TenantUpdate,
    TenantResponse
)
