"""
Pipeline:
    trim -> (extract audio -> whisper -> burn subtitles) -> output

- processors: 具体实现（media / subtitle / asr）
- run: 编排与临时目录管理
"""
