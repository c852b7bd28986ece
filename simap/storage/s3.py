import json
import boto3
from botocore.exceptions import ClientError
from typing import Any, Dict, Optional
from simap.storage.interface import SessionStore

class S3SessionStore(SessionStore):
    """
    Implements session storage using AWS S3, one object per session.
    """
    
    def __init__(self, bucket_name: str, prefix: str = "sessions", aws_access_key_id: str = None,
                 aws_secret_access_key: str = None, region_name: str = None, client: Any = None):
        """
        Initialize S3 storage.
        
        Args:
            bucket_name: S3 bucket name
            prefix: Key prefix for session objects
            aws_access_key_id: AWS access key ID (if None, uses environment variables)
            aws_secret_access_key: AWS secret access key (if None, uses environment variables)
            region_name: AWS region name (if None, uses environment variables)
            client: Pre-built boto3 S3 client (tests pass a stub)
        """
        self.bucket_name = bucket_name
        self.prefix = prefix.strip("/")
        
        # If credentials are not provided, boto3 will look for them in environment variables
        self.s3_client = client or boto3.client(
            's3',
            aws_access_key_id=aws_access_key_id or None,
            aws_secret_access_key=aws_secret_access_key or None,
            region_name=region_name
        )
        
        # Ensure bucket exists
        self._ensure_bucket_exists()
    
    def _ensure_bucket_exists(self):
        """Ensure the S3 bucket exists, create it if it doesn't."""
        try:
            self.s3_client.head_bucket(Bucket=self.bucket_name)
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code')
            if error_code == '404':
                # Bucket doesn't exist, create it
                self.s3_client.create_bucket(Bucket=self.bucket_name)
            else:
                # Another error occurred
                raise
    
    def _key(self, session_id: str) -> str:
        return f"{self.prefix}/{session_id}.json"
    
    def get(self, session_id: str) -> Optional[Dict[str, Any]]:
        try:
            response = self.s3_client.get_object(Bucket=self.bucket_name, Key=self._key(session_id))
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') in ('NoSuchKey', '404'):
                return None
            raise
        return json.loads(response['Body'].read())
    
    def put(self, session_id: str, document: Dict[str, Any]) -> str:
        s3_key = self._key(session_id)
        self.s3_client.put_object(
            Bucket=self.bucket_name,
            Key=s3_key,
            Body=json.dumps(document, indent=2).encode("utf-8"),
            ContentType="application/json"
        )
        return f"s3://{self.bucket_name}/{s3_key}"
    
    def stats(self) -> Dict[str, Any]:
        return {
            "backend": "s3",
            "bucket": self.bucket_name,
            "prefix": self.prefix,
        }
