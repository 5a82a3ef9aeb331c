from fastapi.testclient import TestClient

from civicflow.main import create_app
from civicflow.services.blob_store import MemoryBlobStore

client = TestClient(create_app(blob_store=MemoryBlobStore()))

print('ROOT:')
print(client.get('/').json())

print('\nHEALTH:')
print(client.get('/health').json())

print('\nSTORAGE HEALTH:')
try:
    resp = client.get('/health/db')
    print(resp.status_code)
    try:
        print(resp.json())
    except Exception:
        print(resp.text)
except Exception as e:
    print('Storage call raised exception:', e)

print('\nCATEGORIES:')
print(len(client.get('/categories').json()), 'categories')
