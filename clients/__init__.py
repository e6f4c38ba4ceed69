# Infrastructure clients
from clients.memory_store import InMemoryKeyValueStore
from clients.valkey_client import ValkeyKeyValueStore
from clients.geocoding_client import NominatimGeocoder, SimulatedGeocoder, GeocodingServiceError
from clients.payment_gateway import SimulatedPaymentGateway
