import os
import shutil
import logging
from datetime import datetime
from jinja2 import Environment, FileSystemLoader, TemplateNotFound, TemplateSyntaxError

from .content import ContentLoader, get_categories, get_tags
from .errors import QuireError
from .images import ImageBatchProcessor
from .publish import FtpPublisher
from .settings import QuireSettings

PACKAGE_TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'templates')
STAGING_DIRNAME = '.temp'

# Optional top-level files copied verbatim into the staging area
EXTRA_FILES = ['intro.md', 'main-menu.json']


def php_literal(value):
    """Render a Python value as a PHP literal."""
    if value is None:
        return 'null'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (int, float)):
        return str(value)
    escaped = str(value).replace('\\', '\\\\').replace("'", "\\'")
    return f"'{escaped}'"


class Quire:
    def __init__(self, base_dir=None, content_config=None, ftp_config=None, templates_dir=None,
                 staging_dir=None, log_dir=None, collect_errors=False):
        self.base_dir = base_dir or os.getcwd()
        self.log_dir = log_dir or os.path.join(self.base_dir, 'logs')
        self.setup_logging()

        settings_loader = QuireSettings(self.base_dir)
        self.config = content_config or settings_loader.load_content_config()
        self._settings_loader = settings_loader
        self.ftp_config = ftp_config

        self.staging_dir = staging_dir or os.path.join(self.base_dir, STAGING_DIRNAME)
        self.collect_errors = collect_errors

        # Project templates override the bundled ones
        if templates_dir is None:
            local_templates = os.path.join(self.base_dir, 'templates')
            templates_dir = local_templates if os.path.isdir(local_templates) else None
        search_path = [templates_dir, PACKAGE_TEMPLATES_DIR] if templates_dir else [PACKAGE_TEMPLATES_DIR]
        self.env = Environment(loader=FileSystemLoader(search_path), trim_blocks=True, lstrip_blocks=True)
        self.env.filters['php'] = php_literal

        self.loader = ContentLoader(self.base_dir, self.config.contents_folder,
                                    self.config.posts_folder, self.config.pages_folder)
        self.image_processor = ImageBatchProcessor(self.staging_dir, self.config.contents_folder,
                                                   collect_errors=collect_errors)

        self.posts = []
        self.pages = []
        self.image_maps = {}

    def setup_logging(self):
        """Set up logging configuration."""
        self.logger = logging.getLogger('Quire')
        self.logger.setLevel(logging.DEBUG)

        if not self.logger.handlers:
            # Console handler
            console_handler = logging.StreamHandler()
            console_handler.setLevel(logging.INFO)
            console_handler.setFormatter(logging.Formatter('%(message)s'))
            self.logger.addHandler(console_handler)

            # File handler for all logs
            os.makedirs(self.log_dir, exist_ok=True)
            log_filename = datetime.now().strftime('quire_%Y-%m-%d_%H-%M-%S.log')
            file_handler = logging.FileHandler(os.path.join(self.log_dir, log_filename))
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
            self.logger.addHandler(file_handler)

    def prepare_staging_dir(self):
        """Remove any previous staging directory and create an empty one."""
        if os.path.exists(self.staging_dir):
            shutil.rmtree(self.staging_dir)
        os.makedirs(self.staging_dir, exist_ok=True)

    def render_template(self, template_name, **context):
        """Render a template and return the result as a string."""
        try:
            template = self.env.get_template(template_name)
        except (TemplateNotFound, TemplateSyntaxError) as e:
            raise QuireError(f"Template error in {template_name}: {e}") from e
        return template.render(**context)

    def write_rendered(self, template_name, output_name, **context):
        output_path = os.path.join(self.staging_dir, output_name)
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(self.render_template(template_name, **context))
        self.logger.debug(f"Generated {output_path}")
        return output_path

    def build_data_files(self):
        """Render posts, categories and tags data files."""
        self.logger.info("Creating PHP files...")
        self.write_rendered('posts.php', 'posts.php', posts=self.posts)
        self.write_rendered('categories.php', 'categories.php', categories=get_categories(self.posts))
        self.write_rendered('tags.php', 'tags.php', tags=get_tags(self.posts))
        self.logger.info("PHP files created")

    def copy_folder(self, folder):
        source = os.path.join(self.base_dir, folder)
        if not os.path.isdir(source):
            self.logger.warning(f"Folder not found, skipping copy: {source}")
            return
        shutil.copytree(source, os.path.join(self.staging_dir, folder), dirs_exist_ok=True)
        self.logger.info(f"Copied {folder}")

    def copy_content(self):
        """Copy pages, public and posts folders plus extra files into staging."""
        for folder in (self.config.pages_folder, self.config.public_folder, self.config.posts_folder):
            self.copy_folder(folder)

        for filename in EXTRA_FILES:
            source = os.path.join(self.base_dir, filename)
            if os.path.isfile(source):
                shutil.copyfile(source, os.path.join(self.staging_dir, filename))
                self.logger.info(f"Copied {filename}")
            else:
                self.logger.debug(f"{filename} not found, skipping")

    def build_theme_images(self):
        """Generate derivatives and image-map files for every theme."""
        for theme, resolutions in self.config.theme_image_resolutions.items():
            self.logger.info(f"Processing theme images: {theme}")
            maps = self.image_processor.process_theme(theme, resolutions, self.posts, self.pages)
            self.image_maps[theme] = maps

            self.logger.info(f"Generating image maps: {theme}")
            self.write_rendered('image-maps.php', f"{theme}-image-maps.php", imageMaps=maps)

        if self.image_processor.errors:
            for reference, theme, category, error in self.image_processor.errors:
                self.logger.error(f"{theme}/{category}: {reference}: {error}")
            raise QuireError(f"{len(self.image_processor.errors)} image(s) failed to process")

    def build(self):
        """Assemble the complete site in the staging directory."""
        self.logger.info("Starting process...")
        self.prepare_staging_dir()

        self.posts = self.loader.get_posts()
        self.build_data_files()
        self.copy_content()

        self.pages = self.loader.get_pages()
        self.build_theme_images()

    def deploy(self, publisher=None):
        """Upload the staging directory to the configured FTP server."""
        if publisher is None:
            ftp_config = self.ftp_config or self._settings_loader.load_ftp_config()
            publisher = FtpPublisher(ftp_config)
        self.logger.info("Deploying...")
        publisher.publish(self.staging_dir)
        self.logger.info("Done!")
