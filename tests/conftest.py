import pytest
from django.core.cache import cache

from accounts.models import Rol, UserProfile
from sedes.models import Sede
from vehiculos.models import VehiculoEstado


@pytest.fixture(autouse=True)
def _cache_limpio():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def sede(db):
    return Sede.objects.create(nombre="Central", codigo="CEN", es_principal=True)


@pytest.fixture
def otra_sede(db):
    return Sede.objects.create(nombre="Norte", codigo="NOR")


@pytest.fixture
def estados(db):
    """Catálogo de estados de vehículo indexado por código."""
    return {
        codigo: VehiculoEstado.objects.create(codigo=codigo, descripcion=label)
        for codigo, label in VehiculoEstado.Codigo.choices
    }


@pytest.fixture
def rol_operador(db):
    return Rol.objects.create(name="operador")


@pytest.fixture
def operador(django_user_model, rol_operador, sede):
    user = django_user_model.objects.create_user(username="operador", password="x")
    UserProfile.objects.create(user=user, rol=rol_operador, sede=sede)
    return user
