from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

class SessionStore(ABC):
    """
    Abstract interface for session document storage. Supports both S3 and local filesystem.

    Documents are opaque JSON objects; a put always overwrites (last write wins).
    """
    
    @abstractmethod
    def get(self, session_id: str) -> Optional[Dict[str, Any]]:
        """
        Retrieve a session document.
        
        Args:
            session_id: Sanitized session identifier
            
        Returns:
            The stored document, or None if there is none
        """
        pass
    
    @abstractmethod
    def put(self, session_id: str, document: Dict[str, Any]) -> str:
        """
        Store a session document, replacing any previous one.
        
        Args:
            session_id: Sanitized session identifier
            document: JSON-serializable session document
            
        Returns:
            Storage location the document was written to
        """
        pass
    
    @abstractmethod
    def stats(self) -> Dict[str, Any]:
        """Return backend details for health checks."""
        pass
