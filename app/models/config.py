from pydantic import BaseModel


class DBConfig(BaseModel):
    url: str
    service_role_key: str
