"""Utilities package

리소스 로더와 텍스트 처리(utils.text)만 둡니다. 하위 모듈은 필요한 곳에서 직접 import 합니다.
"""
