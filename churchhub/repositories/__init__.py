from churchhub.repositories.user_repository import UserRepository
from churchhub.repositories.user_role_repository import UserRoleRepository
from churchhub.repositories.church_repository import ChurchRepository
from churchhub.repositories.tenant_repository import TenantRepository
