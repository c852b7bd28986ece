import json
import os
from typing import Any, Dict, Optional
from simap.storage.interface import SessionStore

class FilesystemSessionStore(SessionStore):
    """
    Implements session storage as one JSON file per session on the local filesystem.
    """
    
    def __init__(self, base_dir: str = None):
        """
        Initialize filesystem storage.
        
        Args:
            base_dir: Directory holding ``<session_id>.json`` files.
                      If None, uses 'data' in the current working directory.
        """
        if base_dir is None:
            base_dir = os.path.join(os.getcwd(), "data")
        
        self.base_dir = base_dir
        os.makedirs(self.base_dir, exist_ok=True)
    
    def _path(self, session_id: str) -> str:
        return os.path.join(self.base_dir, f"{session_id}.json")
    
    def get(self, session_id: str) -> Optional[Dict[str, Any]]:
        """
        Read a session document from disk.
        
        Raises:
            ValueError: If the stored file is not valid JSON
        """
        file_path = self._path(session_id)
        if not os.path.exists(file_path):
            return None
        
        with open(file_path, "r", encoding="utf-8") as f:
            return json.load(f)
    
    def put(self, session_id: str, document: Dict[str, Any]) -> str:
        """
        Write a session document, replacing the previous file atomically.
        """
        file_path = self._path(session_id)
        tmp_path = f"{file_path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=2)
        os.replace(tmp_path, file_path)
        
        return file_path
    
    def stats(self) -> Dict[str, Any]:
        sessions = [name for name in os.listdir(self.base_dir) if name.endswith(".json")]
        return {
            "backend": "filesystem",
            "base_dir": self.base_dir,
            "writable": os.access(self.base_dir, os.W_OK),
            "session_count": len(sessions),
        }
