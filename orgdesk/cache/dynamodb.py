"""A DynamoDB table used as key-value storage, for caches shared by several hosts."""
import logging
from typing import List, Optional

import boto3

from .base import KeyValueStorage

logger = logging.getLogger(__name__)

KEY_ATTRIBUTE = 'cache_key'
VALUE_ATTRIBUTE = 'cache_value'


class DynamoDbStorage(KeyValueStorage):
    """Stores each key as one item with `cache_key` as the hash key."""

    def __init__(self, table_name: str,
                 aws_access_key_id: str = None,
                 aws_access_key_secret: str = None,
                 region_name: str = None):
        """Initializes the storage.

        Args:
            table_name (str): Name of an existing table whose hash key is `cache_key`.
            aws_access_key_id (str): The AWS access key ID.
            aws_access_key_secret (str): The AWS access key secret.
            region_name (str): The AWS region name.
        """
        self._table_name = table_name
        self._region_name = region_name
        self._dynamodb = boto3.resource('dynamodb',
                                        aws_access_key_id=aws_access_key_id,
                                        aws_secret_access_key=aws_access_key_secret,
                                        region_name=region_name)
        self._table = self._dynamodb.Table(table_name)

    def get_item(self, key: str) -> Optional[str]:
        response = self._table.get_item(Key={KEY_ATTRIBUTE: key})
        item = response.get('Item')
        if item is None:
            return None
        return item.get(VALUE_ATTRIBUTE)

    def set_item(self, key: str, value: str) -> None:
        self._table.put_item(Item={KEY_ATTRIBUTE: key, VALUE_ATTRIBUTE: value})

    def remove_item(self, key: str) -> None:
        self._table.delete_item(Key={KEY_ATTRIBUTE: key})

    def keys(self) -> List[str]:
        keys = []
        kwargs = {'ProjectionExpression': KEY_ATTRIBUTE}
        while True:
            response = self._table.scan(**kwargs)
            keys.extend(item[KEY_ATTRIBUTE] for item in response.get('Items', []))
            last_key = response.get('LastEvaluatedKey')
            if not last_key:
                return keys
            kwargs['ExclusiveStartKey'] = last_key
