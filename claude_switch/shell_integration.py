import logging
import os
import platform
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)

ALIASES = {
    "claude-anthropic": "anthropic",
    "claude-glm": "glm",
    "claude-status": "status",
}


class ShellIntegration:
    def __init__(self, command: str = "claude-switch"):
        self.system = platform.system()
        self.command = command
        self.marker_start = "# >>> claude-switch aliases >>>"
        self.marker_end = "# <<< claude-switch aliases <<<"

    def get_shell_type(self) -> str:
        """检测当前shell类型"""
        shell = os.environ.get('SHELL', '')
        if 'zsh' in shell:
            return 'zsh'
        elif 'bash' in shell:
            return 'bash'
        elif 'fish' in shell:
            return 'fish'
        else:
            return 'bash'

    def get_shell_config_path(self) -> Path:
        home = Path.home()
        shell_type = self.get_shell_type()

        if shell_type == 'zsh':
            return home / '.zshrc'
        elif shell_type == 'fish':
            return home / '.config' / 'fish' / 'config.fish'
        else:
            bashrc = home / '.bashrc'
            if bashrc.exists() or self.system == 'Linux':
                return bashrc
            else:
                return home / '.bash_profile'

    def get_alias_code(self) -> str:
        if self.get_shell_type() == 'fish':
            lines = [f"alias {name} '{self.command} {sub}'" for name, sub in ALIASES.items()]
        else:
            lines = [f"alias {name}='{self.command} {sub}'" for name, sub in ALIASES.items()]
        return '\n'.join(lines)

    def is_installed(self) -> bool:
        config_path = self.get_shell_config_path()

        if not config_path.exists():
            return False

        try:
            content = config_path.read_text(encoding='utf-8')
        except OSError as e:
            logger.debug("Cannot read %s: %s", config_path, e)
            return False
        return self.marker_start in content

    def install(self) -> bool:
        """Write the alias block into the shell's rc file, replacing an old one."""
        config_path = self.get_shell_config_path()

        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)

            if self.is_installed() and not self.uninstall():
                return False

            existing_content = ""
            if config_path.exists():
                backup_path = config_path.with_name(config_path.name + '.claude-switch.backup')
                shutil.copy2(config_path, backup_path)
                existing_content = config_path.read_text(encoding='utf-8')

            block = f"{self.marker_start}\n{self.get_alias_code()}\n{self.marker_end}\n"
            if existing_content and not existing_content.endswith('\n'):
                existing_content += '\n'

            config_path.write_text(existing_content + '\n' + block, encoding='utf-8')
            logger.debug("Installed aliases into %s", config_path)
            return True

        except OSError as e:
            logger.error("Failed to install aliases into %s: %s", config_path, e)
            return False

    def uninstall(self) -> bool:
        config_path = self.get_shell_config_path()

        if not config_path.exists():
            return True

        try:
            content = config_path.read_text(encoding='utf-8')

            if self.marker_start not in content:
                return True

            # start marker without an end marker: leave the file alone
            if self.marker_end not in content:
                logger.error("Found %s without its end marker in %s", self.marker_start, config_path)
                return False

            new_lines = []
            in_marker_block = False
            for line in content.split('\n'):
                if self.marker_start in line:
                    in_marker_block = True
                    continue
                elif self.marker_end in line:
                    in_marker_block = False
                    continue

                if not in_marker_block:
                    new_lines.append(line)

            remaining = '\n'.join(new_lines).rstrip('\n')
            if remaining:
                remaining += '\n'
            config_path.write_text(remaining, encoding='utf-8')
            return True

        except OSError as e:
            logger.error("Failed to remove aliases from %s: %s", config_path, e)
            return False
