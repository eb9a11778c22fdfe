"""
Deployment of the staging directory to an FTP server.
"""

import ftplib
import logging
import os

from .errors import PublishError


class FtpPublisher:
    """Replaces the contents of a remote directory with a local tree."""

    def __init__(self, ftp_config, ftp_factory=None):
        self.config = ftp_config
        self.ftp_factory = ftp_factory or (ftplib.FTP_TLS if ftp_config.secure else ftplib.FTP)
        self.logger = logging.getLogger('Quire.publish')
        self.files_uploaded = 0

    def connect(self, ftp):
        ftp.connect(self.config.host)
        ftp.login(self.config.user, self.config.password)
        if isinstance(ftp, ftplib.FTP_TLS):
            ftp.prot_p()

    def ensure_dir(self, ftp, remote_path):
        """Create ``remote_path`` as needed and make it the working directory."""
        if remote_path.startswith('/'):
            ftp.cwd('/')
        for part in [p for p in remote_path.split('/') if p]:
            try:
                ftp.cwd(part)
            except ftplib.error_perm:
                ftp.mkd(part)
                ftp.cwd(part)

    def _is_dir(self, ftp, name):
        current = ftp.pwd()
        try:
            ftp.cwd(name)
        except ftplib.error_perm:
            return False
        ftp.cwd(current)
        return True

    def clear_working_dir(self, ftp):
        """Recursively delete everything below the current remote directory."""
        try:
            names = ftp.nlst()
        except ftplib.error_perm as e:
            # Some servers answer 550 when listing an empty directory
            if str(e).startswith('550'):
                return
            raise
        for name in names:
            name = name.rsplit('/', 1)[-1]
            if name in ('.', '..'):
                continue
            if self._is_dir(ftp, name):
                ftp.cwd(name)
                self.clear_working_dir(ftp)
                ftp.cwd('..')
                ftp.rmd(name)
            else:
                ftp.delete(name)

    def upload_dir(self, ftp, local_dir):
        """Upload the contents of ``local_dir`` into the current remote directory."""
        for entry in sorted(os.listdir(local_dir)):
            local_path = os.path.join(local_dir, entry)
            if os.path.isdir(local_path):
                try:
                    ftp.mkd(entry)
                except ftplib.error_perm:
                    pass  # already exists
                ftp.cwd(entry)
                self.upload_dir(ftp, local_path)
                ftp.cwd('..')
            else:
                with open(local_path, 'rb') as f:
                    ftp.storbinary(f"STOR {entry}", f)
                self.files_uploaded += 1
                self.logger.debug(f"Uploaded {local_path}")

    def publish(self, local_dir):
        """Upload ``local_dir`` to the configured remote path."""
        self.logger.info(f"Deploying {local_dir} to {self.config.host}:{self.config.upload_path}")
        ftp = self.ftp_factory()
        try:
            self.connect(ftp)
            self.ensure_dir(ftp, self.config.upload_path)
            self.clear_working_dir(ftp)
            self.upload_dir(ftp, local_dir)
        except ftplib.all_errors as e:
            raise PublishError(f"FTP deployment to {self.config.host} failed: {e}") from e
        finally:
            try:
                ftp.quit()
            except (AttributeError,) + ftplib.all_errors:
                # quit() has no socket to talk to when connect() failed
                ftp.close()
        self.logger.info(f"Uploaded {self.files_uploaded} files")
