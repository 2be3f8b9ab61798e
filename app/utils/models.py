import uuid

from django.db import models


class BaseModel(models.Model):
    """
    Base abstrata de todos os modelos: chave UUID e timestamps.

    ``created_at`` é indexado porque feed, fila de revisão e estatísticas
    filtram e ordenam por ele.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField("Criado em", auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField("Atualizado em", auto_now=True)

    class Meta:
        abstract = True
