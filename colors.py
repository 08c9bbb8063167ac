class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    GREEN = "\033[92m"
    BLUE = "\033[94m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    CYAN = "\033[96m"
    MAG = "\033[95m"

    @classmethod
    def _paint(cls, style: str, text: str) -> str:
        return f"{style}{text}{cls.RESET}"

    @classmethod
    def _tagged(cls, style: str, tag: str, msg: str) -> str:
        return f"{cls._paint(style, tag + ':')}  {msg}"

    @classmethod
    def success(cls, msg: str) -> str:
        return cls._tagged(cls.GREEN, "Done", msg)

    @classmethod
    def info(cls, msg: str) -> str:
        return cls._tagged(cls.CYAN, "Info", msg)

    @classmethod
    def warning(cls, msg: str) -> str:
        return cls._tagged(cls.YELLOW, "Warning", msg)

    @classmethod
    def error(cls, msg: str) -> str:
        """Last line of an aborted run."""
        return cls._tagged(cls.RED, "Abort", msg)

    @classmethod
    def chapter(cls, index: int) -> str:
        return cls._paint(cls.BOLD + cls.MAG, f"Chapter {index}")

    @classmethod
    def title(cls, text: str) -> str:
        return cls._paint(cls.BOLD + cls.BLUE, text)

    @classmethod
    def worker(cls, wid: int, msg: str) -> str:
        return f"{cls._paint(cls.DIM, f'[worker {wid}]')} {msg}"
